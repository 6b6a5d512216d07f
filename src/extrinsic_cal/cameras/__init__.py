from extrinsic_cal.cameras.camera import Camera, CameraParameters

__all__ = ["Camera", "CameraParameters"]
