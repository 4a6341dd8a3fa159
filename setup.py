from setuptools import setup, find_packages

setup(
    name='inlined',
    description='Measures how many call sites and how many bytes of code each function contributes to an ELF binary through inlining, based on its DWARF debug information.',
    version='0.1.0',
    python_requires='>=3.8',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'pyelftools>=0.27',
        'sortedcontainers>=2.0',
    ],
    extras_require={
        "testing": ["pytest"],
    },
    entry_points={
        "console_scripts": ["inlined = inlined.__main__:main"],
    },
)
