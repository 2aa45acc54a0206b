import subprocess
import sys
from unittest.mock import patch

import pytest

from geoparcels.utils.conditional_imports import ConditionalPackageInterceptor


def test_permit_packages():
    ConditionalPackageInterceptor.permit_packages(['fakepkg_a'])
    ConditionalPackageInterceptor.permit_packages({'fakepkg_b': 'fakepkg-b[extra]'})
    assert ConditionalPackageInterceptor.PERMITTED_PACKAGES['fakepkg_a'] == 'fakepkg_a'
    assert ConditionalPackageInterceptor.PERMITTED_PACKAGES['fakepkg_b'] == 'fakepkg-b[extra]'

    with pytest.raises(TypeError):
        ConditionalPackageInterceptor.permit_packages('fakepkg_c')


def test_registered_on_import():
    import geoparcels  # noqa: F401

    assert ConditionalPackageInterceptor in sys.meta_path
    assert ConditionalPackageInterceptor.PERMITTED_PACKAGES['shapely'] == 'geoparcels[shapely]'


def test_find_spec_unregistered():
    assert ConditionalPackageInterceptor.find_spec('not_registered_pkg', None) is None


def test_find_spec_explains_extra():
    ConditionalPackageInterceptor.permit_packages({'fakepkg_d': 'geoparcels[fake]'})
    with pytest.raises(ModuleNotFoundError, match=r'pip install geoparcels\[fake\]'):
        ConditionalPackageInterceptor.find_spec('fakepkg_d', None)


def test_find_spec_auto_download():
    ConditionalPackageInterceptor.permit_packages({'fakepkg_e': 'fakepkg-e'})
    ConditionalPackageInterceptor.permit_auto_download(True)
    try:
        with patch('subprocess.run') as run, \
                patch('importlib.util.find_spec', return_value='spec') as find_spec:
            assert ConditionalPackageInterceptor.find_spec('fakepkg_e', None) == 'spec'
            run.assert_called_once_with(
                [sys.executable, '-m', 'pip', 'install', 'fakepkg-e'], check=True
            )
            find_spec.assert_called_once_with('fakepkg_e')

        with patch(
            'subprocess.run', side_effect=subprocess.CalledProcessError(1, 'pip')
        ):
            assert ConditionalPackageInterceptor.find_spec('fakepkg_e', None) is None
    finally:
        ConditionalPackageInterceptor.permit_auto_download(False)
