#!/usr/bin/env python3
from __future__ import annotations

import os
import pathlib
import re
import sys

import setuptools

__prefix__ = os.getenv('WESTMIX_PREFIX') or ''
__minver__ = '3.8'
__github__ = 'https://github.com/westmix/westmix/'
__gitraw__ = 'https://raw.githubusercontent.com/westmix/westmix/'
__author__ = 'westmix contributors'
__slogan__ = 'A reader for Westwood Studios MIX archives.'
__topics__ = [
    'Development Status :: 3 - Alpha',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: Games/Entertainment',
    'Topic :: Security :: Cryptography',
    'Topic :: System :: Archiving :: Compression'
]


def get_config():
    sys.path.insert(0, str(pathlib.Path(__file__).parent.absolute()))

    import westmix

    def get_setup_readme(filename: str | pathlib.Path | None = None):
        if filename is None:
            filename = pathlib.Path(__file__).parent.joinpath('README.md')
        with open(filename, 'r', encoding='UTF8') as README:
            def complete_link(match):
                link: str = match[1]
                if any(link.lower().endswith(xt) for xt in ('jpg', 'gif', 'png', 'svg')):
                    return F'({__gitraw__}master/{link})'
                else:
                    return F'({__github__}blob/master/{link})'
            readme = README.read()
            return re.sub(R'(?<=\])\((?!\w+://)(.*?)\)', complete_link, readme)

    if __prefix__ == '!':
        console_scripts = []
    else:
        console_scripts = [
            F'{__prefix__}{name}={path}:{name}.run'
            for name, path in westmix.__unit_loader__.units.items()
        ]

    return dict(
        name=westmix.__distribution__,
        version=westmix.__version__,
        long_description=get_setup_readme(),
        long_description_content_type='text/markdown',
        author=__author__,
        description=__slogan__,
        url=__github__,
        python_requires=F'>={__minver__}',
        classifiers=__topics__,
        packages=setuptools.find_packages(include=('westmix*',)),
        install_requires=[],
        extras_require={'test': ['pycryptodomex']},
        entry_points={'console_scripts': console_scripts},
    )


if __name__ == '__main__':
    setuptools.setup(**get_config())
