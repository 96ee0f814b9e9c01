import sys

from pagefolio.database import SessionLocal
from pagefolio.services.pages import get_page_identity
from pagefolio.services.projects import list_projects


def print_projects(owner_id):
    db = SessionLocal()
    try:
        page = get_page_identity(db, owner_id)
        if page is None:
            print(f"No page for owner {owner_id}")
            return
        print(f"Page: /{page.url_slug} (theme: {page.theme})")
        for p in list_projects(db, owner_id):
            print(f"[{p.position}] {p.project_slug} | {p.display_name}")
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python list_projects.py <owner_id>")
        sys.exit(1)
    print_projects(sys.argv[1])
