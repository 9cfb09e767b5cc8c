[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wallpaper-runtime"
version = "0.1.0"
description = "Linux runtime for browsing, downloading and applying Wallpaper Engine workshop wallpapers"
requires-python = ">=3.10"
keywords = ["wallpaper", "steam", "workshop", "kde", "plasma", "steamcmd", "linux"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
]
dependencies = [
    "requests",
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
wallpaper-runtime = "wallpaper_runtime.app:main"

[tool.hatch.build.targets.wheel]
packages = ["wallpaper_runtime"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
