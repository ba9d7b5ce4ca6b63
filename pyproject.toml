[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xorchat"
version = "0.1.0"
description = "A small TCP chat server and client with a toy Diffie-Hellman handshake and XOR-enciphered messages"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "tcp", "asyncio", "diffie-hellman", "xor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
xorchat = "xorchat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["xorchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
