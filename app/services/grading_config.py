import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.marks import GradingScale, SchoolSetting
from app.models.reports import HolisticMetric
from app.schemas import marks as schemas
from app.schemas.reports import HolisticMetricCreate

logger = logging.getLogger(__name__)


class GradingConfigService:
    """Grading scales, per-school curriculum settings and holistic metrics."""

    def __init__(self, db: Session):
        self.db = db

    def create_grading_scale(self, scale: schemas.GradingScaleCreate) -> GradingScale:
        db_scale = GradingScale(**scale.model_dump())
        self.db.add(db_scale)
        self._commit_scales(scale.school_id)
        self.db.refresh(db_scale)
        return db_scale

    def bulk_create_grading_scales(
        self, school_id: int, scales: List[schemas.GradingScaleBase]
    ) -> List[GradingScale]:
        """Insert all scales or none of them."""
        db_scales = [GradingScale(school_id=school_id, **s.model_dump()) for s in scales]
        self.db.add_all(db_scales)
        self._commit_scales(school_id)
        for db_scale in db_scales:
            self.db.refresh(db_scale)
        logger.info("[CONFIG] Created %d grading scales for school %s", len(db_scales), school_id)
        return db_scales

    def _commit_scales(self, school_id: int) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError(
                f"School {school_id} already has a grading scale with that min_score_percent"
            ) from exc

    def get_grading_scales(self, school_id: int) -> List[GradingScale]:
        return (
            self.db.query(GradingScale)
            .filter(GradingScale.school_id == school_id)
            .order_by(GradingScale.min_score_percent.desc())
            .all()
        )

    def delete_grading_scale(self, scale_id: int) -> None:
        db_scale = self.db.query(GradingScale).filter(GradingScale.scale_id == scale_id).first()
        if not db_scale:
            raise NotFound("Grading scale", scale_id)
        self.db.delete(db_scale)
        self.db.commit()

    def upsert_school_setting(self, setting: schemas.SchoolSettingUpsert) -> SchoolSetting:
        db_setting = self.db.query(SchoolSetting).filter(
            SchoolSetting.school_id == setting.school_id
        ).first()

        if db_setting:
            for key, value in setting.model_dump().items():
                setattr(db_setting, key, value)
        else:
            db_setting = SchoolSetting(**setting.model_dump())
            self.db.add(db_setting)

        self.db.commit()
        self.db.refresh(db_setting)
        return db_setting

    def get_school_setting(self, school_id: int) -> Optional[SchoolSetting]:
        return self.db.query(SchoolSetting).filter(SchoolSetting.school_id == school_id).first()

    def create_holistic_metric(self, metric: HolisticMetricCreate) -> HolisticMetric:
        db_metric = HolisticMetric(**metric.model_dump())
        self.db.add(db_metric)
        self.db.commit()
        self.db.refresh(db_metric)
        return db_metric

    def get_holistic_metrics(self, school_id: int) -> List[HolisticMetric]:
        return (
            self.db.query(HolisticMetric)
            .filter(HolisticMetric.school_id == school_id)
            .order_by(HolisticMetric.metric_type, HolisticMetric.metric_name)
            .all()
        )

    def delete_holistic_metric(self, metric_id: int) -> None:
        """Removes the metric together with the feedback recorded against it."""
        db_metric = self.db.query(HolisticMetric).filter(HolisticMetric.metric_id == metric_id).first()
        if not db_metric:
            raise NotFound("Holistic metric", metric_id)
        self.db.delete(db_metric)
        self.db.commit()
