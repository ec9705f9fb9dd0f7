[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tfcsync"
version = "0.1.0"
description = "Reconcile Terraform Cloud workspace settings (tags, SSH keys, run tasks, run triggers, team access, variables, remote state sharing) against a declared specification."
requires-python = ">=3.10"
dependencies = []
keywords = ["terraform", "terraform-cloud", "reconciliation", "workspace", "infrastructure"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tfcsync"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
