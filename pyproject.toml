[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "libreshop"
version = "0.2"
description = "Terminal homebrew shop: browse app repositories, download apps and unpack them onto the storage root"
requires-python = ">=3.10"
keywords = ["homebrew", "shop", "repository", "installer", "tui"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "blessed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
libreshop = "libreshop.app:main"

[tool.hatch.build.targets.wheel]
packages = ["libreshop"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
