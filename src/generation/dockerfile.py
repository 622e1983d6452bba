"""Multi-stage Dockerfile assembly from resolved platforms."""

import logging
import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import semantic_version

from constants import Constants
from .compatibility import CompatiblePlatformResolver, ResolvedPlatform, Resolution
from .context import BuildContext, validate_context
from .errors import BuildError, unsupported_platform

logger = logging.getLogger(__name__)


def _default_tag_rules() -> Dict[str, List[Tuple[str, str]]]:
    return {name: list(rules) for name, rules in Constants.DOCKERFILE_TAG_RULES.items()}


@dataclass
class DockerfileRules:
    """Declarative table mapping platform versions to build-image tags.

    ``tag_rules`` maps a platform name to an ordered list of
    ``(npm range, tag)``; the first matching range wins and no match yields
    ``fallback_tag``. ``extra_args`` holds per-platform ``ARG`` lines where
    ``{version}`` is replaced by the resolved version.
    """
    tag_rules: Dict[str, List[Tuple[str, str]]] = field(default_factory=_default_tag_rules)
    runtime_names: Dict[str, str] = field(
        default_factory=lambda: dict(Constants.DOCKERFILE_RUNTIME_NAMES)
    )
    extra_args: Dict[str, List[str]] = field(default_factory=dict)
    fallback_tag: str = Constants.DOCKERFILE_FALLBACK_TAG
    build_image: str = Constants.BUILD_IMAGE
    runtime_image_repository: str = Constants.RUNTIME_IMAGE_REPOSITORY

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "DockerfileRules":
        """Overlay the ``dockerfile`` section of a config file on the defaults."""
        rules = cls()
        if not config:
            return rules
        for name, entries in (config.get("tags") or {}).items():
            rules.tag_rules[name] = [(e["range"], e["tag"]) for e in entries or []]
        rules.runtime_names.update(config.get("runtime_names") or {})
        for name, args in (config.get("args") or {}).items():
            rules.extra_args[name] = list(args or [])
        for key in ("fallback_tag", "build_image", "runtime_image_repository"):
            if config.get(key):
                setattr(rules, key, config[key])
        return rules

    def tag_for(self, platform_name: str, version: str) -> str:
        """Return the build-image tag for one platform version."""
        try:
            parsed = semantic_version.Version.coerce(version)
        except ValueError:
            return self.fallback_tag
        for version_range, tag in self.tag_rules.get(platform_name, []):
            try:
                spec = semantic_version.NpmSpec(version_range)
            except ValueError:
                logger.warning("Ignoring invalid Dockerfile tag range '%s' for %s", version_range, platform_name)
                continue
            if spec.match(parsed):
                return tag
        return self.fallback_tag

    def shared_tag(self, platforms: Sequence[ResolvedPlatform]) -> str:
        """A tag shared by every platform, or the fallback when they disagree."""
        tags = {self.tag_for(rp.name, rp.version) for rp in platforms}
        return tags.pop() if len(tags) == 1 else self.fallback_tag

    def runtime_name(self, platform) -> str:
        return self.runtime_names.get(platform.name) or platform.runtime_name or platform.name


@dataclass(frozen=True)
class DockerfileResult:
    dockerfile: Optional[str] = None
    error: Optional[BuildError] = None
    runtime: Optional[ResolvedPlatform] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.dockerfile is not None


class DockerfileGenerator:
    """Produces a two-stage Dockerfile: build image, then runtime image."""

    def __init__(self, registry: Sequence, rules: Optional[DockerfileRules] = None):
        self.resolver = CompatiblePlatformResolver(registry)
        self.rules = rules or DockerfileRules()

    def select_runtime(self, context: BuildContext, resolution: Resolution):
        """Return (runtime platform, error)."""
        if context.runtime_platform:
            wanted = context.runtime_platform.strip().lower()
            for rp in resolution.platforms:
                if rp.name.lower() == wanted:
                    return rp, None
            return None, unsupported_platform(
                context.runtime_platform, [rp.name for rp in resolution.platforms]
            )
        for rp in reversed(resolution.platforms):
            if not rp.platform.build_only:
                return rp, None
        return resolution.main, None

    def generate_dockerfile(self, context: BuildContext) -> DockerfileResult:
        """Resolve platforms and render the Dockerfile.

        Raises:
            InvalidUsageError: If the context is contradictory or incomplete.
        """
        validate_context(context, self.resolver.enabled_platforms())
        resolution = self.resolver.resolve(context)
        if not resolution.ok:
            return DockerfileResult(error=resolution.error)
        runtime, error = self.select_runtime(context, resolution)
        if error is not None:
            return DockerfileResult(error=error)

        tag = self.rules.shared_tag(resolution.platforms)
        logger.info(
            "Dockerfile runtime %s:%s on build image tag '%s'",
            self.rules.runtime_name(runtime.platform), runtime.version, tag,
        )
        return DockerfileResult(
            dockerfile=self._render(context, resolution, runtime, tag),
            runtime=runtime,
        )

    def _render(self, context, resolution: Resolution, runtime: ResolvedPlatform, tag: str) -> str:
        lines = [f"ARG RUNTIME={self.rules.runtime_name(runtime.platform)}:{runtime.version}"]
        for rp in resolution.platforms:
            for arg in self.rules.extra_args.get(rp.name, []):
                lines.append(f"ARG {arg.replace('{version}', rp.version)}")

        main = resolution.main
        build_cmd = (
            f"{Constants.PROGRAM_NAME} script /app -o /output --output /tmp/build.sh"
            f" --platform {main.name} --platform-version {main.version}"
        )
        if context.multi_platform_enabled:
            build_cmd += " --enable-multi-platform true"
        body = textwrap.dedent(f"""\

            FROM {self.rules.build_image}:{tag} AS build
            WORKDIR /app
            COPY . .
            RUN {build_cmd} && bash /tmp/build.sh

            FROM {self.rules.runtime_image_repository}/${{RUNTIME}}
            COPY --from=build /output /app
            WORKDIR /app
            """)
        return "\n".join(lines) + "\n" + body
