##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Used to store the application configuration.

Modules:
    config_filepaths.py: Constants for the locations of configuration files.
    configfile.py: Loading of the `app.yaml` file, defaults and environment overrides.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, Optional

from mddb.utils import nested_dict_to_namespaces


# Pylint complains that there's too few methods here but this class might
# be useful if we ever need to do extra stuff with the configuration so we'll
# ignore it for now
class Config:  # pylint: disable=R0903
    """
    The Config class, meant to store all MDDB config settings in one place.

    Attributes:
        mongo (Optional[SimpleNamespace]): Connection settings for the MongoDB server.
        load (Optional[SimpleNamespace]): Settings that drive data loading.

    Methods:
        __copy__: Creates a shallow copy of the Config instance.
        __str__: Returns a formatted string representation of the Config instance.
        load_app_into_namespaces: Converts the provided configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    def __init__(self, app_dict: Dict):
        """
        Initializes the Config instance with configuration data from a dictionary.

        Args:
            app_dict: A dictionary containing configuration data for the application.
                The "mongo" and "load" keys are converted into `SimpleNamespace` objects.
        """
        self.mongo: Optional[SimpleNamespace]
        self.load: Optional[SimpleNamespace]
        self.load_app_into_namespaces(app_dict)

    def __copy__(self) -> "Config":
        """
        Creates a shallow copy of the Config instance.

        Returns:
            A new Config instance with copied `mongo` and `load` attributes.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({"mongo": copy(self.mongo), "load": copy(self.load)})
        return result

    def __str__(self) -> str:
        """
        Returns a formatted string representation of the Config instance.
        The MongoDB password is never displayed.
        """
        formatted_str = "config:"
        for name in ("mongo", "load"):
            namespace = getattr(self, name)
            formatted_str += f"\n  {name}:"
            if namespace is None:
                formatted_str += "\n    None"
                continue
            for key, val in namespace.__dict__.items():
                if key == "password" and val:
                    val = "******"
                formatted_str += f"\n    {key}: {val}"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided configuration dictionary into namespaces
        and assigns them to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data for the application.
        """
        for field in ("mongo", "load"):
            try:
                setattr(self, field, nested_dict_to_namespaces(app_dict[field]))
            except KeyError:
                setattr(self, field, None)
