"""
Filesystem checks: permissions of the project tree.
"""

import stat
from pathlib import Path

from rich.markup import escape

from ..core.base_check import BaseCheck


class FilesystemCheck(BaseCheck):
    report_name = "filesystem"


class FilePermissionCheck(FilesystemCheck):
    """
    Права доступа к файлам проекта.

    Права считаются небезопасными, если выставлен хотя бы один бит,
    которого нет в ожидаемой маске (например 0o664 при ожидаемых 0o644).
    """

    check_name = "File permissions are secure"

    def __init__(self, project_root: Path):
        super().__init__()
        self.project_root = Path(project_root)
        self.found_insecure_permissions = False
        self.expected_files_that_dont_exist = False

    def run(self) -> None:
        self.check_root_directories()
        self.check_root_files()
        self.append_summary()
        self.finish()

    def check_root_directories(self) -> None:
        self.scan_path_recursive("bin", 0o755, 0o755, required=False)
        self.scan_path_recursive("config", 0o644, 0o755, required=False)
        self.scan_path_recursive("src", 0o644, 0o755, required=False)
        self.scan_path_recursive("tests", 0o644, 0o755, required=False)

    def check_root_files(self) -> None:
        self.check_file_perms("pyproject.toml", 0o644)
        self.check_file_perms(".env", 0o640, required=False)

    def append_summary(self) -> None:
        if self.expected_files_that_dont_exist:
            self.append_details([
                "",
                "Expected files that did not exist. This could indicate that there is a problem with too strict "
                "permissions. Please make sure you execute the command with the user that runs your application "
                "using [cmd-warn] sudo -u [/cmd-warn][cmd-success]{user} [/cmd-success][cmd-mark]{command} [/cmd-mark]",
            ])

        if self.found_insecure_permissions:
            self.append_details([
                "",
                "Found files with insecure permissions. Please make sure to change the file permissions of the "
                "listed files to the expected value. Insecure permissions can expose your application to compromise "
                "if another account on the same server is compromised.",
                "",
                "You can change the permissions of existing files with the following commands:",
                "                   Single File: [cmd-warn] chmod [/cmd-warn][cmd-success]{mod} [/cmd-success][cmd-mark]{file} [/cmd-mark]",
                "        All files in directory: [cmd-warn] find [cmd-mark]{dir}[/cmd-mark] -type f -exec chmod [cmd-success]{mod}[/cmd-success] {} + [/cmd-warn]",
                "  All directories in directory: [cmd-warn] find [cmd-mark]{dir}[/cmd-mark] -type d -exec chmod [cmd-success]{mod}[/cmd-success] {} + [/cmd-warn]",
            ])

    def scan_path_recursive(
        self,
        path: str,
        file_expectation: int,
        directory_expectation: int,
        required: bool = True,
    ) -> None:
        full_path = self.project_root / path

        if full_path.is_symlink():
            return

        if full_path.is_dir():
            self.check_file_perms(path, directory_expectation)

            for child in sorted(full_path.iterdir()):
                self.scan_path_recursive(f"{path}/{child.name}", file_expectation, directory_expectation)
        elif full_path.exists():
            self.check_file_perms(path, file_expectation)
        elif required:
            self.expected_file_not_found(path)

    def check_file_perms(self, path: str, expected: int, required: bool = True) -> None:
        full_path = self.project_root / path

        if full_path.exists():
            actual = stat.S_IMODE(full_path.stat().st_mode) & 0o777

            if actual & ~expected:
                self.insecure_file_permissions(
                    f"{path}/" if full_path.is_dir() else path,
                    expected, actual,
                )
        elif required:
            self.expected_file_not_found(path)

    def insecure_file_permissions(self, path: str, expected: int, actual: int) -> None:
        self.found_insecure_permissions = True
        self.fail(
            f"- [fail]{actual:o}[/fail] is considered insecure for file [mark]{escape(path)}[/mark] "
            f"(expected [success]{expected:o}[/success])"
        )

    def expected_file_not_found(self, path: str) -> None:
        self.expected_files_that_dont_exist = True
        self.warn(f"- Expected [mark]{escape(path)}[/mark] but [warn]could not find it[/warn].")
