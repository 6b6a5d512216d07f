from extrinsic_cal.targets.target import Point3d, Target

__all__ = ["Point3d", "Target"]
