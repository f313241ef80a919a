#!/usr/bin/env python3
"""
Development scripts for chibi-izumi-bridge.

These scripts integrate with uv to run the tests, linters and demos.
"""

import subprocess
import sys
from pathlib import Path


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return True if successful."""
    print(f"\n🔄 {description}...")
    print(f"Running: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, check=True, capture_output=False)
        print(f"✅ {description} passed")
        return True
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed with exit code {e.returncode}")
        return False
    except FileNotFoundError:
        print(f"❌ Command not found: {cmd[0]}")
        return False


def run_all(checks: list[tuple[list[str], str]]) -> int:
    all_passed = True
    for cmd, desc in checks:
        if not run_command(cmd, desc):
            all_passed = False
    return 0 if all_passed else 1


def run_tests() -> int:
    """Run the test suite."""
    print("🧪 Running test suite")
    return run_all([(["uv", "run", "pytest", "-v"], "Tests")])


def run_lint() -> int:
    """Run linting checks."""
    print("🔍 Running linting checks")
    ret = run_all(
        [
            (["uv", "run", "ruff", "check", "."], "Ruff linting"),
            (["uv", "run", "ruff", "format", "--check", "."], "Ruff formatting"),
        ]
    )
    if ret:
        print("\n💡 To auto-fix formatting issues, run: uv run ruff format .")
    return ret


def run_typecheck() -> int:
    """Run type checking with mypy."""
    print("🔬 Running type checking")
    return run_all([(["uv", "run", "mypy", "src/izumi/bridge/"], "MyPy type checking")])


def run_demos() -> int:
    """Run all demo scripts to ensure they work correctly."""
    print("🎭 Running demo scripts")

    demo_files = sorted(Path("demo").glob("*.py"))
    if not demo_files:
        print("⚠️  No demo files found in demo directory")
        return 0

    return run_all(
        [
            (["uv", "run", "python", str(demo_file)], f"Demo: {demo_file.name}")
            for demo_file in demo_files
            if not demo_file.name.startswith("_")
        ]
    )


COMMANDS = {
    "test": run_tests,
    "lint": run_lint,
    "typecheck": run_typecheck,
    "demos": run_demos,
}


def check_all() -> int:
    """Run all checks and print a summary."""
    print("🚀 Running all checks for chibi-izumi-bridge")
    print("=" * 50)

    results = {}
    for name, func in COMMANDS.items():
        print(f"\n{'=' * 20} {name} {'=' * 20}")
        results[name] = func() == 0

    print(f"\n{'=' * 20} SUMMARY {'=' * 20}")
    for name, passed in results.items():
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{name:<15} {status}")

    if all(results.values()):
        print("\n🎉 All checks passed!")
        return 0
    print("\n💥 Some checks failed. Please fix the issues above.")
    return 1


if __name__ == "__main__":
    if len(sys.argv) > 1 and (sys.argv[1] in COMMANDS or sys.argv[1] == "check"):
        command = sys.argv[1]
        sys.exit(check_all() if command == "check" else COMMANDS[command]())

    print("Available commands: " + ", ".join([*COMMANDS, "check"]))
    print("Usage: python scripts.py <command>")
    sys.exit(1 if len(sys.argv) > 1 else 0)
