#!/usr/bin/env python

import re
from setuptools import setup

main_py = open('pssmorph/__init__.py').read()
metadata = dict(re.findall("__([a-z]+)__ = '([^']+)'", main_py))

requires = [
    'morfessor>=2.0.2alpha1'
]

setup(name='pssmorph',
      version=metadata['version'],
      author=metadata['author'],
      author_email='pssmorph@example.org',
      description='Unsupervised prefix, stem and suffix segmentation '
                  'by collapsed Gibbs sampling',
      keywords='unsupervised morphological segmentation gibbs sampling',
      packages=['pssmorph', 'pssmorph.tests'],
      classifiers=[
          'Development Status :: 4 - Beta',
          'Intended Audience :: Science/Research',
          'License :: OSI Approved :: BSD License',
          'Operating System :: OS Independent',
          'Programming Language :: Python :: 3',
          'Topic :: Scientific/Engineering',
      ],
      license="BSD",
      scripts=['scripts/pssmorph'],
      install_requires=requires,
      python_requires='>=3.6',
      test_suite='pssmorph.tests',
     )
