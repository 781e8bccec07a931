# Services package init
"""
Xync Backend — Services Layer
=============================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Each service is a stateless singleton. Every public data method takes
       `(db, owner_id, ...)`, runs as one transaction via `transactional`, and
       only ever touches rows whose `user_id` equals `owner_id`.

Service Inventory:
    - UserService:      registration, login, account lookup and deletion
    - BookmarkService:  bookmarks and their tag associations
    - NoteService:      notes
    - TagService:       tags
    - CategoryService:  categories and the hierarchy rules
    - PreviewService:   page metadata fetch for bookmarks (network, no storage)
    - ownership:        the owner-scoped get/delete helpers shared by all of them
"""
