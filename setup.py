import os
from setuptools import setup, find_packages

# Import version from the package without importing the whole package
with open(os.path.join('notetype', '__init__.py'), 'r') as f:
    for line in f:
        if line.startswith('__version__'):
            version = line.split('=')[1].strip().strip('"').strip("'")
            break

setup(
    name="notetype",
    version=version,
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "pyyaml>=6.0,<7.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "notetype=notetype.cli:main",
        ],
    },
    description="Terminal journal and notes manager with a curses interface",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Environment :: Console :: Curses",
        "Topic :: Text Editors",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    include_package_data=True,
)
