"""
Setup script for gcurve.

Usage:
    pip install -e .           # Editable install
    pip install -e ".[dev]"    # With test dependencies

Pure Python: numpy supplies the dense linear algebra, Gauss-Legendre rules
and polynomial roots; scipy evaluates b-spline curves.
"""

from setuptools import setup, find_packages


setup(
    name='gcurve',
    version='0.1.0',
    description='Parametric curve evaluation, closest point, plane and curve-curve intersection',
    package_dir={'': 'src'},
    packages=find_packages(where='src', include=['gcurve', 'gcurve.*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'scipy',
    ],
    extras_require={
        'dev': ['pytest'],
    },
)
