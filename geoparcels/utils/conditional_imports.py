"""
Intercepts import errors concerning optional imports to either:
    - Explain which package extra provides the missing module, or
    - Pip install the extra automatically, if that has been permitted
"""

__all__ = ['ConditionalPackageInterceptor']

from importlib import util
import subprocess
import sys
from typing import Dict, List, Union

from geoparcels.utils.mixins import LoggingMixin


class ConditionalPackageInterceptor(LoggingMixin):
    """
    A meta path finder, appended to the end of sys.meta_path, that is only ever
    consulted for modules no other finder could locate. For modules registered via
    .permit_packages() it either pip installs the corresponding requirement (when
    auto-download is enabled) or raises a ModuleNotFoundError naming the extra
    that provides it.

    geoparcels registers its optional packages in its root __init__.py:

        ConditionalPackageInterceptor.permit_packages({'shapely': 'geoparcels[shapely]'})
        sys.meta_path.append(ConditionalPackageInterceptor)
    """

    PERMITTED_PACKAGES: Dict[str, str] = {}
    AUTO_DOWNLOAD = False

    @classmethod
    def permit_packages(cls, packages: Union[List[str], Dict[str, str]]) -> None:
        """
        Registers optional modules. A list installs each module under its own name;
        a dict maps the import name to the pip requirement, e.g.
        {'shapely': 'geoparcels[shapely]'}.

        Args:
            packages:
                The modules that will be allowed to auto-install if missing

        Returns:
            None
        """
        if isinstance(packages, list):
            cls.PERMITTED_PACKAGES.update({item: item for item in packages})
        elif isinstance(packages, dict):
            cls.PERMITTED_PACKAGES.update(packages)
        else:
            raise TypeError(
                f"Permitted packages must be submitted as a list or dict, not {type(packages)}"
            )

    @classmethod
    def permit_auto_download(cls, option: bool) -> None:
        """Defines whether packages may be auto-downloaded or not. Default False."""
        cls.AUTO_DOWNLOAD = option

    @classmethod
    def find_spec(  # pylint: disable=unused-argument, inconsistent-return-statements
            cls, name, path, target=None
    ):
        """Called by importlib once every other finder has failed to locate `name`"""
        if name not in cls.PERMITTED_PACKAGES:
            return

        requirement = cls.PERMITTED_PACKAGES[name]
        if cls.AUTO_DOWNLOAD:
            print(f"Module {name!r} not installed. Attempting to pip install {requirement}...")
            try:
                subprocess.run(
                    [sys.executable, '-m', 'pip', 'install', requirement],
                    check=True
                )
            except subprocess.CalledProcessError:
                return None

            return util.find_spec(name)

        raise ModuleNotFoundError(
            f"The module {name!r} is an optional dependency of geoparcels. Either:\n\n"
            f"1) Install it yourself:\n"
            f"    pip install {requirement}\n\n"
            "2) Allow geoparcels to install it on first use:\n"
            "    from geoparcels.utils.conditional_imports import ConditionalPackageInterceptor\n"
            "    ConditionalPackageInterceptor.permit_auto_download(True)"
        )
