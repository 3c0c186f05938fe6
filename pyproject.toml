[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "accessrules"
version = "0.1.0"
description = "Access control building blocks: policy models, role managers, file adapters and storage interfaces"
requires-python = ">=3.10"
dependencies = []
keywords = ["access control", "authorization", "rbac", "policy", "roles"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["accessrules*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
