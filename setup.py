# setup.py
from setuptools import setup, find_packages

setup(
    name="index_scout",
    version="0.1.0",
    description="Сверка статусов индексации Google Search Console и запросы на индексацию",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "lxml>=5.0",
        "google-auth>=2.20",
        "requests>=2.31",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "index-scout=index_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
