import setuptools

setuptools.setup(
	name='treemacro',
	version='0.1.0',
	packages=[
		'treemacro',
		'treemacro.support',
	],
	description='Hygienic pattern-and-template macro expansion over token trees',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	python_requires=">=3.9",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Topic :: Software Development :: Compilers",
		"Topic :: Software Development :: Pre-processors",
		"Development Status :: 3 - Alpha",
	],
	author="Ian Kjos",
	author_email="kjosib@gmail.com"
)
