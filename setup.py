#!/usr/bin/env python
import setuptools

setuptools.setup(
    name="nestedforms",
    version="0.0.1",
    description="Embedded forms and one-to-many collection forms for Django",
    packages=setuptools.find_packages(),
    install_requires=[
        "dj-database-url",
        "django",
        "python-dotenv",
        "sentry-sdk",
    ],
    extras_require={
        "test": [
            "factory-boy",
            "pytest",
            "pytest-django",
        ],
    },
)
