[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dosync"
version = "0.1.0"
description = "Health checks and rolling-update orchestration for Docker Compose services"
requires-python = ">=3.10"
dependencies = []
keywords = ["docker", "docker-compose", "health-check", "rolling-update", "deployment", "rollback"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dosync"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
