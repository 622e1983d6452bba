"""SDK installation snippets and installed-version probes shared by platforms."""

import os
import textwrap
from typing import Optional

from constants import Constants


class PlatformInstaller:
    """Knows where a platform's SDKs live and how a script installs one.

    A version counts as installed when the build image ships it under the
    built-in root, or when an earlier dynamic install left the sentinel file
    in its install directory.
    """

    def __init__(
        self,
        platform_name: str,
        builtin_root: str = Constants.BUILTIN_INSTALL_ROOT,
        dynamic_root: str = Constants.DYNAMIC_INSTALL_ROOT,
        storage_url: str = Constants.SDK_STORAGE_BASE_URL,
    ):
        self.platform_name = platform_name
        self.builtin_root = builtin_root
        self.dynamic_root = dynamic_root
        self.storage_url = storage_url.rstrip("/")

    def builtin_dir(self, version: str) -> str:
        return os.path.join(self.builtin_root, self.platform_name, version)

    def install_dir(self, version: str) -> str:
        return os.path.join(self.dynamic_root, self.platform_name, version)

    def sentinel_path(self, version: str) -> str:
        return os.path.join(self.install_dir(version), Constants.SDK_SENTINEL_FILE)

    def is_version_installed(self, version: str) -> bool:
        """Return True when the version is on the image or was installed before."""
        if os.path.isdir(self.builtin_dir(version)):
            return True
        return os.path.isfile(self.sentinel_path(version))

    def tarball_url(self, version: str, file_prefix: Optional[str] = None) -> str:
        prefix = file_prefix or self.platform_name
        return f"{self.storage_url}/{self.platform_name}/{prefix}-{version}.tar.gz"

    def install_snippet(self, version: str, file_prefix: Optional[str] = None) -> str:
        """Shell lines that download and unpack the SDK into its install dir."""
        install_dir = self.install_dir(version)
        tar_file = f"{self.platform_name}-{version}.tar.gz"
        return textwrap.dedent(f"""\
            PLATFORM_SETUP_START=$SECONDS
            echo
            echo "Downloading and extracting '{self.platform_name}' version '{version}' to '{install_dir}'..."
            rm -rf "{install_dir}"
            mkdir -p "{install_dir}"
            cd "{install_dir}"
            curl -fsSL "{self.tarball_url(version, file_prefix)}" -o "{tar_file}"
            tar -xzf "{tar_file}" -C .
            rm -f "{tar_file}"
            PLATFORM_SETUP_ELAPSED_TIME=$(($SECONDS - $PLATFORM_SETUP_START))
            echo "Done in $PLATFORM_SETUP_ELAPSED_TIME sec(s)."
            echo
            """)

    def sentinel_snippet(self, version: str) -> str:
        """Shell line marking the version as installed."""
        return f'echo > "{self.sentinel_path(version)}"\n'
