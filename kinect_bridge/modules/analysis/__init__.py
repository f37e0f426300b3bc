"""Stateless skeletal queries."""
from .skeletal import SkeletalAnalyzer, joint_angle, nearest_person

__all__ = ["SkeletalAnalyzer", "joint_angle", "nearest_person"]
