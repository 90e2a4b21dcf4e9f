"""Container image reference parsing and default-registry rewriting."""

import re
from dataclasses import dataclass

_REGISTRY_HINT = re.compile(r"[.:]")


@dataclass(frozen=True)
class ImageReference:
    repository: str
    registry: str | None = None
    namespace: str | None = None
    tag: str | None = None
    digest: str | None = None

    @property
    def fullname(self) -> str:
        """Fully qualified name, e.g. ``registry.com:1234/library/node:4``."""
        registry = f"{self.registry}/" if self.registry else ""
        namespace = f"{self.namespace or 'library'}/"
        suffix = f"@{self.digest}" if self.digest else f":{self.tag or 'latest'}"
        return f"{registry}{namespace}{self.repository}{suffix}"


def parse_image(image: str) -> ImageReference:
    """Split ``[registry/][namespace/]repository[:tag][@digest]``.

    The first path component is a registry only when more components follow
    and it looks like a host (contains ``.`` or ``:``, or is ``localhost``).
    """
    name, _, digest = image.partition("@")
    parts = name.split("/")

    registry = None
    if len(parts) > 1 and (_REGISTRY_HINT.search(parts[0]) or parts[0] == "localhost"):
        registry = parts.pop(0)

    repository, _, tag = parts.pop().partition(":")
    return ImageReference(
        repository=repository,
        registry=registry,
        namespace="/".join(parts) or None,
        tag=tag or None,
        digest=digest or None,
    )


def docker_image_name(container: str, docker_registry: str | None = None) -> str:
    """Image to run: unchanged when it names a registry or no default registry is set."""
    if not docker_registry or parse_image(container).registry:
        return container
    return parse_image(f"{docker_registry}/{container}").fullname
