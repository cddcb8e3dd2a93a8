#!/usr/bin/env python3

import ast
import setuptools

with open('aspawn/__init__.py') as file:
    long_description = ast.get_docstring(ast.parse(file.read()))

setuptools.setup(
    name='aspawn',
    version='0.1.0',
    description='aspawn - spawn a process, get a handle now and a result later',
    long_description=long_description,
    long_description_content_type='text/plain',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.11',
    install_requires=['funcpipes'],
    extras_require={
        'test': ['pytest', 'pytest-asyncio'],
    },
)
