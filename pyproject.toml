[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oceandoc"
version = "0.1.0"
description = "Server utilities: time, text, path, filesystem, hashing, configuration and a shared thread pool"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["utilities", "filesystem", "hashing", "blake3", "configuration", "thread-pool"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oceandoc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
