"""Setup configuration for prstat"""

from setuptools import setup, find_packages

setup(
    name="prstat",
    version="0.1.0",
    description=(
        "CLI tool for monthly pull-request statistics: counts, change sizes, "
        "lead time and time to merge."
    ),
    author="prstat Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
        "python-dateutil>=2.8.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
            "types-python-dateutil",
            "types-requests",
        ],
    },
    entry_points={
        "console_scripts": [
            "prstat=prstat.main:main",
        ],
    },
)
