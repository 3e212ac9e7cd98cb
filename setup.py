from setuptools import setup, find_packages

setup(
    name="patchpilot",
    version="1.2.4",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "unidiff>=0.7",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "patchpilot=patchpilot.cli:main",
        ],
    },
)
