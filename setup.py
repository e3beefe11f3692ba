from setuptools import setup, find_packages

setup(
    name='shinline',
    version='0.1.0',
    py_modules=['shinline', 'compiler'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'shinline = shinline:main',
        ],
    },
)
