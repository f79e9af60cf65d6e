# /*
# Copyright 2026 The Virtink Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Build the Virtink images under test into the local Docker image store."""

from __future__ import annotations

from collections.abc import Iterable

import docker
from rich.panel import Panel

from virtink_e2e import console
from virtink_e2e.config import E2EConfig, Image
from virtink_e2e.constants import PROG_DOCKER
from virtink_e2e.errors import BuildError, CommandError
from virtink_e2e.utils import Command, run_command


def connect_docker() -> docker.DockerClient:
    """Connect to the Docker daemon and check that it answers.

    Returns:
        A connected Docker client.

    Raises:
        BuildError: If the daemon cannot be reached.
    """
    try:
        client = docker.from_env()
        client.ping()
    except Exception as err:
        raise BuildError(f"connect to Docker daemon: {err}") from err
    return client


def buildx_args(image: Image) -> tuple[str, ...]:
    """Return the ``docker`` arguments that build and load *image*."""
    args = ["buildx", "build", "-t", image.tag, "-f", image.dockerfile, "--load", "."]
    for arg in image.build_args:
        args += ["--build-arg", arg]
    return tuple(args)


def build_image(image: Image, cfg: E2EConfig, docker_client: docker.DockerClient) -> str:
    """Build one image and look it up in the local image store.

    Args:
        image: Image to build.
        cfg: E2E configuration; the project directory is the build context.
        docker_client: Connected Docker client.

    Returns:
        Short id of the built image.

    Raises:
        BuildError: If the build fails or the tag is missing afterwards.
    """
    try:
        run_command(Command(PROG_DOCKER, buildx_args(image), cwd=cfg.project_dir))
    except CommandError as err:
        raise BuildError(f"build {image.tag}: {err}") from err

    try:
        built = docker_client.images.get(image.tag)
    except docker.errors.ImageNotFound as err:
        raise BuildError(f"image {image.tag} not found after build") from err
    except Exception as err:
        raise BuildError(f"inspect {image.tag}: {err}") from err
    console.print(f"[green]\u2713 {image.tag} ({built.short_id})[/green]")
    return built.short_id


def build_images(images: Iterable[Image], cfg: E2EConfig) -> dict[str, str]:
    """Build every image in order, stopping at the first failure.

    Args:
        images: Images to build.
        cfg: E2E configuration with the project directory.

    Returns:
        Mapping of tag to short image id.

    Raises:
        BuildError: If the daemon is unreachable or any build fails.
    """
    console.print(Panel.fit("Building images", style="bold blue"))
    docker_client = connect_docker()
    try:
        built = {image.tag: build_image(image, cfg, docker_client) for image in images}
    finally:
        docker_client.close()
    console.print(f"[green]\u2705 Built {len(built)} images[/green]")
    return built
