#  -*- coding: utf-8 -*-
"""
Saving beans to and loading beans from XML files.
"""

from __future__ import annotations

import logging

from pathlib import Path

from .beans import Bean
from .reader import BeanXmlReader
from .settings import SerSettings
from .writer import BeanXmlWriter


logger = logging.getLogger(__name__)


def save(bean: Bean,
         path: Path | str,
         overwrite: bool = True,
         settings: SerSettings | None = None) -> Path:
    """
    Write any bean to an XML file.

    Parameters
    ----------
    bean : Bean
        Bean to save.
    path : str or Path
        Output path, used as given.
    overwrite : bool, default True
        If False and the file exists, raises FileExistsError.
    settings : SerSettings, optional
        Writer settings.

    Returns
    -------
    Path
        The path written.

    Raises
    ------
    FileExistsError
        If the file exists and overwrite is False.
    """
    path = Path(path)

    if path.is_file() and not overwrite:
        raise FileExistsError(f"Path {path} already exists")

    BeanXmlWriter(settings).write_to(bean, path)

    logger.debug("Saved %s to %s", type(bean).__qualname__, path)

    return path


def load(path: Path | str, settings: SerSettings | None = None) -> Bean:
    """
    Read a bean from an XML file.

    The returned object is of the concrete type named in the file.

    Raises
    ------
    FileNotFoundError
        If the path does not exist or is not a file.
    """
    return BeanXmlReader(settings).read_file(Path(path))


class Persistable(Bean):
    """
    Bean that can be saved to and loaded from disk.

    File extension
    --------------
    The default file extension is stored in the class attribute
    ``extension``. When ``save(..., use_default_extension=True)`` is used, the
    given path is rewritten with this suffix.

    Examples
    --------
    >>> class Experiment(Persistable):
    ...     extension = '.exp'
    ...     name = BeanProperty(kind=str)
    >>>
    >>> path = Experiment(name='run-1').save('results/run-1')
    >>> path.name
    'run-1.exp'
    >>> Experiment.load(path)
    Experiment(name='run-1')
    """

    # ========== ========== ========== ========== ========== class attributes
    extension: str = '.xml'

    # ========== ========== ========== ========== ========== public methods
    def save(self,
             path: Path | str,
             overwrite: bool = True,
             use_default_extension: bool = True,
             settings: SerSettings | None = None) -> Path:
        """
        Save this instance to an XML file.

        Parameters
        ----------
        path : str or Path
            Output path.
        overwrite : bool, default True
            If False and the file exists, raises FileExistsError.
        use_default_extension : bool, default True
            If True, rewrites the suffix of ``path`` to ``type(self).extension``.
        settings : SerSettings, optional
            Writer settings.

        Returns
        -------
        Path
            The path written.
        """
        path = Path(path)

        if use_default_extension:
            path = path.with_suffix(type(self).extension)

        return save(self, path, overwrite=overwrite, settings=settings)

    @classmethod
    def load(cls, path: Path | str, settings: SerSettings | None = None) -> Bean:
        """
        Load a bean saved with ``save``.

        The returned object is the concrete class encoded in the file, not
        necessarily ``cls``.
        """
        return load(path, settings)


__all__ = [
    'Persistable',
    'save',
    'load',
]
