from collections import Counter

from config import Config
from services.prereqs import load_prereq_overrides, merged_overrides
from utils.course_catalog import load_catalog
from utils.req_parser import format_req


if __name__ == "__main__":
    catalog = load_catalog(Config.CATALOG_DIR)
    overrides = merged_overrides(load_prereq_overrides(Config.PREREQ_OVERRIDES_PATH))

    with_prereqs = sum(1 for c in catalog if not c.prerequisites.is_empty())
    print("Courses loaded:", len(catalog))
    print("Courses with prerequisites:", with_prereqs)

    # references to codes the catalog does not have
    dangling = catalog.dangling_references(overrides)
    missing = Counter(ref for _, ref in dangling)
    examples = {}
    for code, ref in dangling:
        examples.setdefault(ref, code)

    print("\nDangling references:", sum(missing.values()))
    for ref, cnt in missing.most_common(20):
        print(f"{cnt:>3} x {ref}   (e.g. {examples[ref]})")

    print("\nActive overrides:", len(overrides))
    for code, expr in sorted(overrides.items()):
        course = catalog.get(code)
        before = format_req(course.prerequisites) if course else "(not in catalog)"
        print(f"  {code}: {before or '-'}  ->  {format_req(expr) or '-'}")
