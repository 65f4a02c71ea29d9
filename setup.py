import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

package_list = setuptools.find_namespace_packages(include=["boxtype", "boxtype.*"])

setuptools.setup(
    name="boxtype",
    version="0.2.0",
    author="Shahab Tasharrofi",
    author_email="shahab.tasharrofi@gmail.com",
    description="Type-Driven Development for Python: Nominally-Typed Boxes and Maybe/Either Values",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/stasharrofi/pytyped",
    install_requires=["python-dateutil>=2.8.1", "pyhocon>=0.3.54"],
    extras_require={"test": ["pytest>=6.0"]},
    packages=package_list,
    package_data={package_name: ['py.typed', '*.conf'] for package_name in package_list},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.7',
    zip_safe=False,
)
