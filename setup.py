"""
hyjob - HYSPLIT job description translator.

Install:
    pip install .

Install with test dependencies:
    pip install ".[test]"
"""

from setuptools import find_packages, setup


if __name__ == "__main__":
    setup(
        name="hyjob",
        version="0.1.0",
        description="Validate HYSPLIT job descriptions and compose CONTROL, SETUP.CFG and EMITIMES files",
        python_requires=">=3.8",
        packages=find_packages(exclude=["tests", "tests.*"]),
        install_requires=[
            "numpy",
            "pandas<3",
        ],
        extras_require={
            "test": ["pytest"],
        },
    )
