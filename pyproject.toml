[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qpdlkit"
version = "2.0.0"
description = "Render and analyse QPDL (SPL2/SPLc) print streams for laser printers"
requires-python = ">=3.10"
dependencies = []
keywords = ["qpdl", "spl2", "splc", "pjl", "printing", "printer", "pbm"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Printing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["qpdlkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
