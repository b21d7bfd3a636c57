# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="scanprops",
    version="0.1.0",
    description="Compute the static-analysis properties of a multi-module build",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["scanprops", "scanprops.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'scanprops=scanprops.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
