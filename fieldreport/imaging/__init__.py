from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.factory import ImagingBackendFactory
from fieldreport.imaging.normalizer import ImageNormalizer
from fieldreport.imaging.overlay import StampOverlay

__all__ = ["BaseImagingBackend", "ImageNormalizer", "ImagingBackendFactory", "StampOverlay"]
