"""Project version and static dependency metadata."""

__version__ = "0.3.0"

# Accepted OpenResty releases. One bare version is an exact match; two bare
# versions are an inclusive min/max range; operator expressions
# (">=1.25.3.1") are used as written.
DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "nginx": ("1.25.3.1",),
}
