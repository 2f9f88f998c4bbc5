"""
Pure string transforms that turn free text from an API document into valid
proto identifiers
"""

# Standard
import re

## Globals #####################################################################

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")
_PATH_WORD_BREAKS = re.compile(r"[-./]")
_PATH_ILLEGAL = re.compile(r"[^A-Za-z0-9 ]")


## Interface ###################################################################


def package_name(title: str) -> str:
    """Lower-case the title and squash out all whitespace"""
    return "".join(title.split()).lower()


def service_name(title: str) -> str:
    """Title-case each word of the title and add the Service suffix"""
    return "".join(word.title() for word in title.split()) + "Service"


def to_enum(enum_name: str, value) -> str:
    """Build the scoped, upper-cased name for a single enum value

    Args:
        enum_name:  str
            The name of the enum the value belongs to
        value:  Any
            The literal value from the schema's enum list

    Returns:
        enum_value_name:  str
            ENUMNAME_VALUE with spaces as underscores and & spelled out
    """
    value = "" if value is None else str(value)
    if not value.strip():
        value = "EMPTY"
    name = f"{enum_name}_{value}"
    name = name.replace(" ", "_").replace("&", "and")
    return name.upper()


def path_method_to_name(path: str, method: str, operation_id: str = "") -> str:
    """Get the rpc method name for the given path and HTTP verb. An explicit
    operation id takes precedence over the path.

    NOTE: Distinct path/verb pairs can map to the same name (e.g. /foo-bar and
        /foo/bar). Such collisions are not detected.
    """
    if operation_id:
        return _upper_first_words(_NON_ALNUM.split(operation_id))
    if path.endswith(".json"):
        path = path[: -len(".json")]
    path = _PATH_WORD_BREAKS.sub(" ", path)
    path = _PATH_ILLEGAL.sub("", path)
    return _upper_first(method.lower()) + _upper_first_words(path.split())


def message_name(name: str) -> str:
    """Convert a definition or property name to an UpperCamel type name"""
    return _upper_first_words(_NON_ALNUM.split(name))


def field_name(name: str) -> str:
    """Replace characters that may not appear in a proto field name"""
    return _NON_IDENTIFIER.sub("_", name)


## Impl ########################################################################


def _upper_first(word: str) -> str:
    if not word:
        return word
    return word[0].upper() + word[1:]


def _upper_first_words(words) -> str:
    return "".join(_upper_first(word) for word in words if word)
