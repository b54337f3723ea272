from setuptools import setup

setup(
    name="minplus",
    version="1.0.0",
    author="Ludovic Thomas",
    license="GPLv3",
    description="Exact min-plus and max-plus algebra of ultimately pseudo-periodic curves for network calculus",
    packages=[
        "minplus",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Natural Language :: English",
    ],
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
)
