[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "historymap"
version = "0.1.0"
description = "HTTP API serving historical routes, points of interest and participants from a Supabase database"
requires-python = ">=3.10"
keywords = ["history", "map", "routes", "poi", "supabase", "postgrest", "api", "flask"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.2",
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
historymap = "historymap.app:main"

[tool.hatch.build.targets.wheel]
packages = ["historymap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
