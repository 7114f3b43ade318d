"""Setup configuration for the tw-browser tool."""

from setuptools import setup, find_packages

setup(
    name="tw-browser",
    version="0.1.0",
    description="Teeworlds master server and game server browser client",
    packages=find_packages(include=["tw_browser", "tw_browser.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tw-browser=tw_browser.cli:main",
        ],
    },
)
