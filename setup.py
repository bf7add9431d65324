from setuptools import setup, find_namespace_packages

excludes = ("tests", "tests.*", "examples", "examples.*", "docs", "docs.*", "devtools", "devtools.*")

metadata = \
    dict(
        zip_safe=False,
        packages=find_namespace_packages(where=".", include=("freqhmm", "freqhmm.*"), exclude=excludes),
        package_dir={"freqhmm": "freqhmm"},
        include_package_data=True,
    )

if __name__ == '__main__':
    setup(**metadata)
