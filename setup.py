from setuptools import setup, find_packages

setup(
    name='karma-motor',
    version='1.0.0',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    description='KARMA motor: push, draw and tool-tip exploration primitives for dual-arm affordance learning',
    install_requires=[
        'numpy',
        'scipy',
        'pyzmq',
        'draccus',
        'PyYAML',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'karma-motor=karma.motor.main:main',
        ],
    },
    python_requires='>=3.8',
)
