"""
Relational Store - Database Models

SQLAlchemy models for the imported UI tree, the flat property record,
settings, scripts and control metadata.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# ==================== Imported Documents ====================

class UiNode(Base):
    """One control in an imported document tree."""
    __tablename__ = 'ui_tree'

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey('ui_tree.id', ondelete='CASCADE'), nullable=True)
    control_type = Column(String(64), nullable=False)
    name = Column(String(128), nullable=True)
    source_file = Column(String(1024), nullable=True)
    is_root = Column(Boolean, default=False, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    imported_at = Column(Float, nullable=True)

    children = relationship(
        'UiNode',
        order_by='UiNode.display_order',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )
    properties = relationship(
        'UiProperty',
        cascade='all, delete-orphan',
        passive_deletes=True,
        back_populates='node',
    )

    __table_args__ = (
        Index('ix_ui_tree_source', 'source_file'),
        Index('ix_ui_tree_parent', 'parent_id', 'display_order'),
        {'sqlite_autoincrement': True},
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'parent_id': self.parent_id,
            'control_type': self.control_type,
            'name': self.name,
            'source_file': self.source_file,
            'is_root': bool(self.is_root),
            'display_order': self.display_order,
            'imported_at': self.imported_at,
        }


class UiProperty(Base):
    """Persisted property of a node. One value per (node, name)."""
    __tablename__ = 'ui_properties'

    id = Column(Integer, primary_key=True, autoincrement=True)
    ui_tree_id = Column(Integer, ForeignKey('ui_tree.id', ondelete='CASCADE'), nullable=False)
    property_name = Column(String(128), nullable=False)
    property_value = Column(Text, nullable=True)

    node = relationship('UiNode', back_populates='properties')

    __table_args__ = (
        UniqueConstraint('ui_tree_id', 'property_name', name='uq_ui_property'),
    )


class ScriptRow(Base):
    """Named script imported from a document."""
    __tablename__ = 'scripts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), unique=True, nullable=False)
    interpreter = Column(String(64), nullable=False)
    instance = Column(String(128), nullable=True)
    content = Column(Text, nullable=False, default='')
    source_file = Column(String(1024), nullable=True)
    created_at = Column(Float, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'interpreter': self.interpreter,
            'instance': self.instance,
            'content': self.content,
            'source_file': self.source_file,
        }


# ==================== Session State ====================

class FlatProperty(Base):
    """Flat property record: live edits keyed by control name."""
    __tablename__ = 'properties'

    control_name = Column(String(128), primary_key=True)
    property_name = Column(String(128), primary_key=True)
    property_value = Column(Text, nullable=True)


class Setting(Base):
    """Runtime setting."""
    __tablename__ = 'settings'

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=True)
    description = Column(Text, nullable=True)


class DialogResult(Base):
    """Last dialog answer, readable by external scripts."""
    __tablename__ = 'dialog_results'

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=True)
    timestamp = Column(Float, nullable=True)


# ==================== Control Metadata ====================

class ControlEvent(Base):
    """Maps a markup event property (OnClick) to a control event (Click)."""
    __tablename__ = 'control_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    control_type = Column(String(64), nullable=False)
    event_name = Column(String(64), nullable=False)
    target_event = Column(String(64), nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint('control_type', 'event_name', name='uq_control_event'),
    )


class ControlTypeRow(Base):
    """Control type descriptor."""
    __tablename__ = 'control_types'

    name = Column(String(64), primary_key=True)
    python_type = Column(String(256), nullable=False)
    category = Column(String(64), nullable=False, default='Common')
    icon = Column(String(32), nullable=True)
    default_width = Column(Float, nullable=True)
    default_height = Column(Float, nullable=True)
    default_props = Column(Text, nullable=True)
    is_container = Column(Boolean, default=False, nullable=False)
    is_user_defined = Column(Boolean, default=False, nullable=False)
