#!/usr/bin/env python

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Setuptools installer for mailtrap.
"""

import pathlib

import setuptools

setuptools.setup(
    name="mailtrap",
    version="1.0.0",
    description="A minimal local SMTP server for development",
    long_description=pathlib.Path("README.rst").read_text(encoding="utf8"),
    long_description_content_type="text/x-rst",
    license="MIT",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    install_requires=[
        "Twisted >= 22.10.0",
        "zope.interface >= 5",
        "attrs >= 22.2.0",
        "constantly >= 15.1",
        "incremental >= 22.10.0",
    ],
    entry_points={
        "console_scripts": ["mailtrap = mailtrap.scripts.mailtrap:run"],
    },
    classifiers=[
        "Framework :: Twisted",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Communications :: Email :: Mail Transport Agents",
    ],
)
