"""Setup resourceful."""

from setuptools import find_packages, setup

with open("README.md") as f:
    readme = f.read()


extra_reqs = {"test": ["pytest", "pytest-cov", "mock"]}


setup(
    name="resourceful",
    version="1.0.0",
    description="Resource-oriented request routing and dispatch",
    long_description=readme,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    ],
    keywords="HTTP routing dispatch resources",
    license="BSD",
    packages=find_packages(exclude=["ez_setup", "example", "tests"]),
    include_package_data=True,
    zip_safe=False,
    extras_require=extra_reqs,
)
