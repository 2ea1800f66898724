"""
meta/ - Table and Procedure Metadata
====================================
Immutable descriptors that render SQL text. Nothing here touches the database.
"""
