from setuptools import setup

setup(
    name="spells",
    version="0.1.0",
    description="Indentation-based markup language with components and imports that compiles to html",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=['spells'],
    python_requires=">=3.9",
    install_requires=[
        "watchdog",
        "pyyaml",
        "markdown",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["spells=spells.__main__:main"],
    },
)
