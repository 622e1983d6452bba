"""Python platform: virtualenv or target-dir installs, Django collectstatic."""

import logging
import textwrap
from typing import Any, Dict, List, Optional

import requirements
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from constants import Constants, EnvVars, ManifestKeys, PlatformNames
from common.logging_utils import extra_context, is_debug_enabled
from generation.errors import DetectionParseError, InvalidUsageError
from .base import DetectionResult, Platform, read_repo_text

logger = logging.getLogger(__name__)

VIRTUALENV_NAME = "virtualenv_name"
COMPRESS_VIRTUALENV = "compress_virtualenv"
PACKAGEDIR = "packagedir"

TAR_GZ = "tar-gz"
ZIP = "zip"

_SPECIFIER_PREFIXES = ("~=", "==", "!=", "<=", ">=", "<", ">", "===")
_DETECTION_FILES = (
    Constants.REQUIREMENTS_FILE,
    Constants.PYPROJECT_TOML_FILE,
    Constants.SETUP_PY_FILE,
    Constants.RUNTIME_TXT_FILE,
)


def _parse_requirements(repo) -> List[str]:
    """Return lower-cased distribution names from requirements.txt."""
    if not repo.file_exists(Constants.REQUIREMENTS_FILE):
        return []
    body = read_repo_text(repo, PlatformNames.PYTHON.value, Constants.REQUIREMENTS_FILE)
    names: List[str] = []
    try:
        for req in requirements.parse(body):
            name = getattr(req, "name", None)
            if isinstance(name, str) and name:
                names.append(name.lower())
    except (ValueError, TypeError) as e:
        raise DetectionParseError(
            PlatformNames.PYTHON.value, Constants.REQUIREMENTS_FILE, str(e)
        ) from e
    return names


def _load_pyproject(repo) -> Optional[Dict[str, Any]]:
    if not repo.file_exists(Constants.PYPROJECT_TOML_FILE):
        return None
    try:
        text = read_repo_text(repo, PlatformNames.PYTHON.value, Constants.PYPROJECT_TOML_FILE)
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise DetectionParseError(
            PlatformNames.PYTHON.value, Constants.PYPROJECT_TOML_FILE, str(e)
        ) from e


def _version_from_runtime_txt(repo) -> Optional[str]:
    """runtime.txt holds a single line such as ``python-3.8.1``."""
    if not repo.file_exists(Constants.RUNTIME_TXT_FILE):
        return None
    for line in read_repo_text(repo, PlatformNames.PYTHON.value, Constants.RUNTIME_TXT_FILE).splitlines():
        line = line.strip()
        if line:
            return line
    return None


class PythonPlatform(Platform):
    """Installs requirements into a virtualenv (or a package dir) and runs Django steps."""

    name = PlatformNames.PYTHON.value
    manifest_version_key = ManifestKeys.PYTHON_VERSION

    def detect(self, context) -> Optional[DetectionResult]:
        repo = context.source_repo
        if not any(repo.file_exists(f) for f in _DETECTION_FILES):
            return None

        # Surface malformed manifests at detection time.
        _parse_requirements(repo)
        pyproject = _load_pyproject(repo)

        version = _version_from_runtime_txt(repo)
        if version is None and pyproject:
            project = pyproject.get("project") or {}
            requires = project.get("requires-python") if isinstance(project, dict) else None
            if isinstance(requires, str) and requires.strip():
                version = requires.strip()

        if is_debug_enabled(logger):
            logger.debug(
                "Detected Python application",
                extra=extra_context(
                    event="detect",
                    component="platform",
                    action="detect",
                    platform=self.name,
                    version=version,
                ),
            )
        return DetectionResult(language=self.name, language_version=version)

    def normalize_version(self, raw: str) -> str:
        """Strip ``python-`` and resolve PEP 440 specifiers to a supported version."""
        text = raw.strip()
        if text.lower().startswith("python-"):
            text = text[len("python-"):]
        if not (text.startswith(_SPECIFIER_PREFIXES) or "," in text):
            return text
        try:
            spec = SpecifierSet(text)
        except InvalidSpecifier:
            return text
        matches = []
        for candidate in self.supported_versions:
            try:
                parsed = Version(candidate)
            except InvalidVersion:
                continue
            if parsed in spec:
                matches.append((parsed, candidate))
        if not matches:
            return text
        matches.sort(key=lambda m: m[0], reverse=True)
        return matches[0][1]

    def _is_django_app(self, repo) -> bool:
        if not repo.file_exists(Constants.DJANGO_MANAGE_FILE):
            return False
        return "django" in _parse_requirements(repo)

    @staticmethod
    def default_virtualenv_name(version: str) -> str:
        parts = version.split(".")
        return f"pythonenv{'.'.join(parts[:2])}"

    def validate_properties(self, context) -> None:
        self._compression(context)

    def _compression(self, context) -> Optional[str]:
        if COMPRESS_VIRTUALENV not in context.properties:
            return None
        value = (context.get_property(COMPRESS_VIRTUALENV) or "").strip().lower()
        if value in ("", TAR_GZ):
            return TAR_GZ
        if value == ZIP:
            return ZIP
        raise InvalidUsageError(
            f"Invalid value '{value}' for '{COMPRESS_VIRTUALENV}'. Expected '{TAR_GZ}' or '{ZIP}'."
        )

    def _install_command(self, repo, target: Optional[str] = None) -> str:
        target_arg = f' --target="{target}" --upgrade' if target else ""
        if repo.file_exists(Constants.REQUIREMENTS_FILE):
            return f"python -m pip install --cache-dir /usr/local/share/pip-cache --prefer-binary -r {Constants.REQUIREMENTS_FILE}{target_arg}"
        return f"python -m pip install --cache-dir /usr/local/share/pip-cache --prefer-binary .{target_arg}"

    def generate_build_snippet(self, context, version: str) -> str:
        repo = context.source_repo
        package_dir = context.get_property(PACKAGEDIR)
        compression = self._compression(context)
        lines = ['echo "Python Version: $(which python)"', "python --version"]

        if package_dir:
            lines.append(f'echo "Installing packages into \'{package_dir}\'..."')
            lines.append(f'mkdir -p "{package_dir}"')
            lines.append(self._install_command(repo, target=package_dir))
        else:
            venv = context.get_property(VIRTUALENV_NAME) or self.default_virtualenv_name(version)
            lines.append(textwrap.dedent(f"""\
                echo "Creating virtual environment '{venv}'..."
                python -m venv "{venv}" --copies
                source "{venv}/bin/activate"
                python -m pip install --upgrade pip""").rstrip())
            lines.append(self._install_command(repo))

        if self._is_django_app(repo):
            lines.append(textwrap.dedent(f"""\
                if [ -z "${EnvVars.DISABLE_COLLECTSTATIC}" ]; then
                    echo "Running collectstatic..."
                    set +e
                    python {Constants.DJANGO_MANAGE_FILE} collectstatic --noinput
                    COLLECTSTATIC_EXIT_CODE=$?
                    set -e
                    if [ $COLLECTSTATIC_EXIT_CODE -ne 0 ]; then
                        echo "'collectstatic' exited with exit code $COLLECTSTATIC_EXIT_CODE."
                    fi
                fi""").rstrip())

        if not package_dir and compression:
            venv = context.get_property(VIRTUALENV_NAME) or self.default_virtualenv_name(version)
            if compression == ZIP:
                lines.append(f'zip -y -q -r "{venv}.zip" "{venv}"')
            else:
                lines.append(f'tar -zcf "{venv}.tar.gz" -C "{venv}" .')
            lines.append(f'rm -rf "{venv}"')
        return "\n".join(lines) + "\n"

    def manifest_entries(self, context, version: str) -> dict:
        entries = {ManifestKeys.PYTHON_VERSION: version}
        package_dir = context.get_property(PACKAGEDIR)
        if package_dir:
            entries[ManifestKeys.PACKAGEDIR] = package_dir
            return entries
        venv = context.get_property(VIRTUALENV_NAME) or self.default_virtualenv_name(version)
        entries[ManifestKeys.VIRTUALENV_NAME] = venv
        compression = self._compression(context)
        if compression == ZIP:
            entries[ManifestKeys.COMPRESSED_VIRTUALENV_FILE] = f"{venv}.zip"
        elif compression == TAR_GZ:
            entries[ManifestKeys.COMPRESSED_VIRTUALENV_FILE] = f"{venv}.tar.gz"
        return entries
