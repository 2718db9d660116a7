# pylint: disable=missing-module-docstring
# ruff: noqa

from pathlib import Path

from setuptools import find_packages, setup


def read_long_description() -> str:
    """Return README contents for PyPI description."""
    readme_path = Path(__file__).with_name("README.md")
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else "TW Stock Trends"


setup(
    name="tw-stock-trends",
    version="0.1.0",
    description="Trending Taiwan stock keywords from PTT and Google Trends",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=find_packages(include=["trend_engine", "trend_engine.*", "keyword_engine", "keyword_engine.*", "fetchers", "fetchers.*"]),
    include_package_data=True,
    install_requires=[
        "pandas>=2.0",
        "httpx>=0.26",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "beautifulsoup4>=4.12",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tw-trends = trend_engine.cli_entrypoints:trends",
            "tw-trends-fresh = trend_engine.cli_entrypoints:trends_fresh",
            "tw-trends-json = trend_engine.cli_entrypoints:trends_json",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
