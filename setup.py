"""setuptools setup for GrowthTrack.

Install for development:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages

setup(
    name="growthtrack",
    version="0.1.0",
    description="Countdown session timers for teen athlete health tracking",
    packages=find_packages(include=["growthtrack", "growthtrack.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "requests>=2.31",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["growthtrack=growthtrack.__main__:main"],
    },
)
