# Services package init
"""
NoteBox: Services Layer
==========================

Service Inventory:
    - NoteStore: create / get_by_id / list_all / update / delete over the
      notes table, one statement and one transaction per call
"""
