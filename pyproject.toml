[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sentrywire"
version = "1.6.0"
description = "Command parsing, access control, dispatch and configuration for the Sentry authorization engine's wire protocol"
requires-python = ">=3.11"
dependencies = []
keywords = [
    "authorization",
    "policy",
    "acl",
    "resp3",
    "access-control",
    "protocol",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["sentrywire"]

[tool.hatch.build.targets.sdist]
include = [
    "sentrywire",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
