import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from copilot_kit.pm.package_manager import (
    SUPPORTED_PMS,
    add_command,
    config_template,
    detect_package_manager,
    find_package_manager,
    find_project_root,
    install_command,
    prompt_package_manager,
    run_command,
    update_package_json,
    write_config_file,
)


class TestDetectPackageManager(unittest.TestCase):
    def test_single_lockfile_selects_its_manager(self) -> None:
        cases = [
            ("package-lock.json", "npm"),
            ("yarn.lock", "yarn"),
            ("pnpm-lock.yaml", "pnpm"),
            ("bun.lockb", "bun"),
            ("bun.lock", "bun"),
        ]
        for lockfile, expected in cases:
            with self.subTest(lockfile=lockfile):
                with tempfile.TemporaryDirectory() as tmp:
                    (Path(tmp) / lockfile).write_text("")
                    self.assertEqual(detect_package_manager(tmp), expected)

    def test_empty_directory_defaults_to_npm(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(detect_package_manager(tmp), "npm")
            self.assertIsNone(find_package_manager(tmp))

    def test_missing_directory_defaults_to_npm(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(detect_package_manager(Path(tmp) / "does-not-exist"), "npm")

    def test_non_path_input_defaults_to_npm(self) -> None:
        self.assertEqual(detect_package_manager(12345), "npm")

    def test_lockfile_priority(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb"):
                (root / name).write_text("")
            self.assertEqual(detect_package_manager(root), "bun")

            (root / "bun.lockb").unlink()
            self.assertEqual(detect_package_manager(root), "pnpm")

            (root / "pnpm-lock.yaml").unlink()
            self.assertEqual(detect_package_manager(root), "yarn")

    def test_package_manager_field(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            pkg = {"name": "demo", "packageManager": "pnpm@8.15.0+sha256.abc"}
            (Path(tmp) / "package.json").write_text(json.dumps(pkg))
            self.assertEqual(detect_package_manager(tmp), "pnpm")

    def test_lockfile_beats_package_manager_field(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "package.json").write_text(json.dumps({"packageManager": "pnpm@8.0.0"}))
            (Path(tmp) / "yarn.lock").write_text("")
            self.assertEqual(detect_package_manager(tmp), "yarn")

    def test_unsupported_package_manager_field(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "package.json").write_text(json.dumps({"packageManager": "deno@1.0.0"}))
            self.assertEqual(detect_package_manager(tmp), "npm")

    def test_malformed_package_json_is_ignored(self) -> None:
        for content in ("{not json", "[1, 2]", json.dumps({"packageManager": 42})):
            with self.subTest(content=content):
                with tempfile.TemporaryDirectory() as tmp:
                    (Path(tmp) / "package.json").write_text(content)
                    self.assertEqual(detect_package_manager(tmp), "npm")


class TestCommandBuilders(unittest.TestCase):
    def test_install_command(self) -> None:
        self.assertEqual(install_command("npm"), "npm install")
        self.assertEqual(install_command("yarn"), "yarn install")
        self.assertEqual(install_command("pnpm"), "pnpm install")
        self.assertEqual(install_command("bun"), "bun install")

    def test_run_command(self) -> None:
        self.assertEqual(run_command("npm"), "npm run")
        self.assertEqual(run_command("yarn"), "yarn")
        self.assertEqual(run_command("pnpm", "build"), "pnpm run build")
        self.assertEqual(run_command("yarn", "test"), "yarn test")

    def test_add_command(self) -> None:
        self.assertEqual(add_command("npm"), "npm install")
        self.assertEqual(add_command("npm", dev=True), "npm install --save-dev")
        self.assertEqual(add_command("yarn"), "yarn add")
        self.assertEqual(add_command("yarn", True), "yarn add --dev")
        self.assertEqual(add_command("pnpm", True), "pnpm add --save-dev")
        self.assertEqual(add_command("bun", True), "bun add --dev")

    def test_commands_contain_manager_name(self) -> None:
        for pm in SUPPORTED_PMS:
            with self.subTest(pm=pm):
                for command in (install_command(pm), run_command(pm), add_command(pm), add_command(pm, True)):
                    self.assertTrue(command)
                    self.assertIn(pm, command)

    def test_unknown_manager_falls_back_to_npm(self) -> None:
        for bogus in ("cargo", "", None, 3, ["npm"]):
            with self.subTest(pm=bogus):
                self.assertEqual(install_command(bogus), "npm install")
                self.assertEqual(run_command(bogus), "npm run")
                self.assertEqual(add_command(bogus), "npm install")
                self.assertEqual(add_command(bogus, dev=True), "npm install --save-dev")


class TestPromptPackageManager(unittest.TestCase):
    def test_accepts_number(self) -> None:
        with patch("copilot_kit.pm.package_manager.click.prompt", return_value="3"):
            self.assertEqual(prompt_package_manager(), "pnpm")

    def test_accepts_name_and_retries_invalid(self) -> None:
        with patch("copilot_kit.pm.package_manager.click.prompt", side_effect=["9", "maven", " Yarn "]) as mock_prompt:
            self.assertEqual(prompt_package_manager(), "yarn")
            self.assertEqual(mock_prompt.call_count, 3)


class TestProjectSetup(unittest.TestCase):
    def test_config_template(self) -> None:
        self.assertEqual(config_template("npm")[0], ".npmrc")
        self.assertEqual(config_template("pnpm")[0], ".npmrc")
        self.assertEqual(config_template("yarn")[0], ".yarnrc.yml")
        self.assertEqual(config_template("bun")[0], "bunfig.toml")
        self.assertIsNone(config_template("cargo"))

    def test_write_config_file_never_overwrites(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            written = write_config_file(tmp, "yarn")
            self.assertEqual(written, Path(tmp) / ".yarnrc.yml")
            self.assertIn("nodeLinker", written.read_text())

            written.write_text("custom\n")
            self.assertIsNone(write_config_file(tmp, "yarn"))
            self.assertEqual(written.read_text(), "custom\n")

    def test_update_package_json_sets_field(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            pkg_path = Path(tmp) / "package.json"
            pkg_path.write_text(json.dumps({"name": "demo", "packageManager": "npm@10.0.0"}))

            self.assertTrue(update_package_json(tmp, "pnpm"))
            data = json.loads(pkg_path.read_text())
            self.assertEqual(data["packageManager"], "pnpm@*")
            self.assertEqual(data["name"], "demo")

            # Already pinned to pnpm: nothing to do
            self.assertFalse(update_package_json(tmp, "pnpm"))

    def test_update_package_json_without_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertFalse(update_package_json(tmp, "npm"))
            (Path(tmp) / "package.json").write_text("{broken")
            self.assertFalse(update_package_json(tmp, "npm"))

    def test_find_project_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "package.json").write_text("{}")
            nested = root / "src" / "lib"
            nested.mkdir(parents=True)
            self.assertEqual(find_project_root(nested), root)


if __name__ == "__main__":
    unittest.main()
