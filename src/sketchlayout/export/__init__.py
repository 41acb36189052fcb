from .description import (
    describe_components,
    describe_group,
    generate_layout_description,
    position_description,
)
from .stylesheet import GROUP_CLASSES, collapse_rule, generate_stylesheet, group_rule
