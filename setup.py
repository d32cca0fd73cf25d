from os import path

import setuptools

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

with open(path.join(this_directory, "requirements.txt")) as f:
    requirements = f.read().splitlines()

entry_points = {"console_scripts": ["lnurl = lnurlkit.cli.cli:cli"]}

setuptools.setup(
    name="lnurlkit",
    version="0.1.0",
    description="LNURL client: lnurl decoding, lightning addresses and pay requests",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest", "pytest-asyncio", "respx"],
    },
    include_package_data=True,
    entry_points=entry_points,
)
