[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relaychat"
version = "0.1.0"
description = "A minimal TCP chat relay: a server that rebroadcasts messages and a terminal client"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "tcp", "relay", "socket", "terminal"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
relaychat-server = "relaychat.server:main"
relaychat-client = "relaychat.client:main"

[tool.hatch.build.targets.wheel]
packages = ["relaychat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
