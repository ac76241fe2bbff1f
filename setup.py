# setup.py
from setuptools import setup, find_packages

setup(
    name="contact_scout",
    version="0.1.0",
    description="Asynchronous contact discovery engine ContactScout",
    packages=find_packages(include=["contact_scout", "contact_scout.*"]),
    package_data={"contact_scout.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["contact-scout=contact_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
