from setuptools import setup

setup(
    name='rtkit',
    version='v1.0',
    packages=['rtkit', 'rtkit.config', 'rtkit.data', 'rtkit.data.images', 'rtkit.io', 'rtkit.processing',
              'rtkit.processing.drr', 'rtkit.processing.segmentation'],
    package_data={'rtkit.config': ['*.cfg']},
    install_requires=['numpy', 'scipy', 'Pillow', 'pydicom', 'appdirs'],
    extras_require={'test': ['pytest']},
    url='http://www.opentps.org/',
    license='Apache 2.0',
    author='Université catholique de Louvain',
    author_email='',
    description='Geometry toolkit for radiotherapy structures: contour tracing, STAPLE and ray tracing DRRs'
)
