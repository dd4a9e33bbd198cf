[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mvstools"
version = "0.1.0"
description = "MVS-style dataset catalog, FTP protocol helpers, an SMTP mailer and small web application helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["ftp", "smtp", "mvs", "dataset", "vtoc", "pds", "catalog", "collection"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: File Transfer Protocol (FTP)",
    "Topic :: Communications :: Email",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mvs-sendmail = "mvstools.mailer:main"

[tool.hatch.build.targets.wheel]
packages = ["mvstools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
