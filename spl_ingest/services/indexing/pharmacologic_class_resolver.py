"""Identified substances and the pharmacologic class graph."""

from typing import NamedTuple, Optional

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import (
    IdentifiedSubstance,
    PharmacologicClass,
    PharmacologicClassHierarchy,
    PharmacologicClassLink,
    PharmacologicClassName,
)
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import NameUse, SubjectKind
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.base_resolver import BaseResolver
from spl_ingest.utils.xml_helpers import attr, spl_element, spl_elements, text_content


class ClassCode(NamedTuple):
    code: str
    system: Optional[str]
    display_name: Optional[str]


def read_class_code(kind_el: Optional[etree._Element]) -> Optional[ClassCode]:
    """Class code of a generalizedMaterialKind, None when it has no code value."""
    code_el = spl_element(kind_el, c.CODE)
    code = attr(code_el, "code")
    if code is None:
        return None
    return ClassCode(code, attr(code_el, "codeSystem"), attr(code_el, "displayName"))


class PharmacologicClassResolver(BaseResolver):
    """Indexes the identified substance subjects of a section.

    A subject coded in the UNII system is an active moiety: each class it is
    specialized from becomes a (global) PharmacologicClass linked to the
    moiety, with one level of parent classes. Any other subject defines a
    pharmacologic class: the class is owned by the substance and each
    asSpecializedKind names a parent class.
    """

    async def resolve(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Index every subject/identifiedSubstance/identifiedSubstance.

        Args:
            section_el: Section element
            ctx: Context with section set

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        path = (c.SUBJECT, c.IDENTIFIED_SUBSTANCE, c.IDENTIFIED_SUBSTANCE)
        for substance_el in spl_elements(section_el, *path):
            await self._guard(
                result, ctx, "identified substance",
                lambda substance_el=substance_el: self._resolve_substance(substance_el, ctx),
            )
        return result

    async def _resolve_substance(self, substance_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        result = ParseResult()
        code_el = spl_element(substance_el, c.CODE)
        identifier = attr(code_el, "code")
        system = attr(code_el, "codeSystem")
        if identifier is None:
            self._warn(result, ctx, "Identified substance without a code skipped")
            return result

        subject_kind = SubjectKind.ACTIVE_MOIETY if system == c.UNII_OID else SubjectKind.PHARMACOLOGIC_CLASS
        substance, created = await ctx.store.get_or_create(
            IdentifiedSubstance,
            defaults={
                "subject_kind": subject_kind.value,
                "is_definition": subject_kind is SubjectKind.PHARMACOLOGIC_CLASS,
            },
            section_id=ctx.section.id,
            identifier_value=identifier,
            identifier_system=system,
        )
        if created:
            result.record_created(IdentifiedSubstance.__name__)
            if ctx.options.resolve_pending_on_insert:
                result.merge_from(await self.pending.resolve_for_substance(ctx.store, substance))

        if subject_kind is SubjectKind.ACTIVE_MOIETY:
            result.merge_from(await self._index_active_moiety(substance_el, substance, ctx))
        else:
            class_code = ClassCode(identifier, system, attr(code_el, "displayName"))
            result.merge_from(await self._define_class(substance_el, substance, class_code, ctx))

        return result

    async def _index_active_moiety(
        self,
        substance_el: etree._Element,
        substance: IdentifiedSubstance,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()

        for kind_el in spl_elements(substance_el, c.AS_SPECIALIZED_KIND, c.GENERALIZED_MATERIAL_KIND):
            class_code = read_class_code(kind_el)
            if class_code is None:
                self._warn(result, ctx, "Specialized kind without a class code skipped")
                continue

            pharm_class = await self._get_or_create_class(class_code, None, ctx, result)
            await self._add_names(kind_el, pharm_class, ctx, result)

            _, created = await ctx.store.get_or_create(
                PharmacologicClassLink,
                substance_id=substance.id,
                class_id=pharm_class.id,
            )
            if created:
                result.record_created(PharmacologicClassLink.__name__)

            for parent_kind_el in spl_elements(kind_el, c.AS_SPECIALIZED_KIND, c.GENERALIZED_MATERIAL_KIND):
                parent_code = read_class_code(parent_kind_el)
                if parent_code is None:
                    continue
                parent_class = await self._get_or_create_class(parent_code, None, ctx, result)
                await self._add_edge(pharm_class, parent_class, ctx, result)

        return result

    async def _define_class(
        self,
        substance_el: etree._Element,
        substance: IdentifiedSubstance,
        class_code: ClassCode,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()

        pharm_class = await self._get_or_create_class(class_code, substance, ctx, result)
        await self._add_names(substance_el, pharm_class, ctx, result)

        for kind_el in spl_elements(substance_el, c.AS_SPECIALIZED_KIND, c.GENERALIZED_MATERIAL_KIND):
            parent_code = read_class_code(kind_el)
            if parent_code is None:
                self._warn(result, ctx, f"Parent of class {class_code.code} has no class code")
                continue
            parent_class = await self._get_or_create_class(parent_code, None, ctx, result)
            await self._add_edge(pharm_class, parent_class, ctx, result)

        return result

    async def _get_or_create_class(
        self,
        class_code: ClassCode,
        defining_substance: Optional[IdentifiedSubstance],
        ctx: IngestionContext,
        result: ParseResult,
    ) -> PharmacologicClass:
        pharm_class, created = await ctx.store.get_or_create(
            PharmacologicClass,
            defaults={
                "display_name": class_code.display_name,
                "defining_substance_id": defining_substance.id if defining_substance else None,
            },
            class_code=class_code.code,
            class_system=class_code.system,
        )
        if created:
            result.record_created(PharmacologicClass.__name__)
        elif defining_substance is not None and pharm_class.defining_substance_id is None:
            # Referenced before its definition was ingested
            pharm_class.defining_substance_id = defining_substance.id
            await ctx.store.flush()
        return pharm_class

    async def _add_names(
        self,
        owner_el: etree._Element,
        pharm_class: PharmacologicClass,
        ctx: IngestionContext,
        result: ParseResult,
    ) -> None:
        for name_el in spl_elements(owner_el, c.NAME):
            name_value = text_content(name_el)
            if name_value is None:
                continue
            try:
                name_use = NameUse(attr(name_el, "use") or NameUse.ALTERNATE.value)
            except ValueError:
                self._warn(result, ctx, f"Unknown name use on class name '{name_value}', stored as alternate")
                name_use = NameUse.ALTERNATE

            _, created = await ctx.store.get_or_create(
                PharmacologicClassName,
                class_id=pharm_class.id,
                name_value=name_value,
                name_use=name_use.value,
            )
            if created:
                result.record_created(PharmacologicClassName.__name__)

    async def _add_edge(
        self,
        child: PharmacologicClass,
        parent: PharmacologicClass,
        ctx: IngestionContext,
        result: ParseResult,
    ) -> None:
        if ctx.options.reject_class_cycles and await ctx.store.classes.would_create_cycle(child.id, parent.id):
            self._warn(
                result, ctx,
                f"Rejected class hierarchy edge {child.class_code} -> {parent.class_code}: it would create a cycle",
            )
            return

        _, created = await ctx.store.get_or_create(
            PharmacologicClassHierarchy,
            child_class_id=child.id,
            parent_class_id=parent.id,
        )
        if created:
            result.record_created(PharmacologicClassHierarchy.__name__)
