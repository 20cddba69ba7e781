from fieldreport.watermark.assets import WatermarkAssets, load_watermark_assets
from fieldreport.watermark.composer import WatermarkComposer
from fieldreport.watermark.qr_encoder import QrEncoder

__all__ = ["QrEncoder", "WatermarkAssets", "WatermarkComposer", "load_watermark_assets"]
