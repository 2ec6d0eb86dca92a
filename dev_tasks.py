#!/usr/bin/env python3
"""
Development tasks for batchql.

Usage: python dev_tasks.py <command>
"""

import os
import shutil
import subprocess
import sys


def run_command(command, check=True):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    run_command("black batchql tests examples")
    run_command("isort batchql tests examples")


def lint():
    ok = run_command("mypy batchql", check=False)
    ok = run_command("flake8 batchql tests examples", check=False) and ok
    if not ok:
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    run_command("pytest tests/ -v")


def serve():
    run_command("python -m batchql")


def demo():
    run_command("python -m examples.batching_demo")


def install_dev():
    run_command("pip install -e .[dev,test]")


def main():
    commands = {
        "clean": clean,
        "format": format_code,
        "lint": lint,
        "test": test,
        "serve": serve,
        "demo": demo,
        "install-dev": install_dev,
        "all": lambda: (format_code(), lint(), test()),
    }
    if len(sys.argv) < 2:
        print("Usage: python dev_tasks.py <command>")
        print("Commands: " + ", ".join(commands))
        sys.exit(1)
    fn = commands.get(sys.argv[1])
    if not fn:
        print(f"Unknown command: {sys.argv[1]}")
        sys.exit(1)
    fn()


if __name__ == "__main__":
    main()
