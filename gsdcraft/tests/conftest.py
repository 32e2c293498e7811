import os
import sys

import pytest

# Add the project root to sys.path so that gsdcraft is importable
# This is needed because of the flat layout structure
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from gsdcraft.config import SETTINGS_ENV_VAR, reset_settings  # noqa: E402
from gsdcraft.parser.gsdml import GsdmlParser, clear_document_cache  # noqa: E402

# Record 100 of the DAP (12 bytes):
#   byte 0      Mode        Unsigned8, values Off/On/Auto, allowed 0..2
#   byte 1      Diagnosis   Bit 0
#   byte 1      Filter      BitArea bits 2..4
#   bytes 2-3   Offset      Integer16
#   bytes 4-7   Limit       Integer32, allowed 0..65535
#   bytes 8-10  Tag         VisibleString(3)
#   byte 11     Diagnosis_1 Bit 7 (second "Diagnosis" text)
SAMPLE_GSDML = """\
<ISO15745Profile xmlns="http://www.profibus.com/GSDML/2003/11/DeviceProfile">
  <ProfileBody>
    <DeviceIdentity VendorID="0x002A" DeviceID="0x0101">
      <InfoText TextId="T_DevInfo"/>
      <VendorName Value="ACME"/>
    </DeviceIdentity>
    <ApplicationProcess>
      <DeviceAccessPointList>
        <DeviceAccessPointItem ID="DAP_1" ModuleIdentNumber="0x00000001" FixedInSlots="0">
          <ModuleInfo>
            <Name TextId="T_DAP_Name"/>
            <InfoText TextId="T_DAP_Info"/>
            <OrderNumber Value="ACME-100"/>
            <HardwareRelease Value="1"/>
            <SoftwareRelease Value="V1.2"/>
          </ModuleInfo>
          <VirtualSubmoduleList>
            <VirtualSubmoduleItem ID="DAP_Sub" SubmoduleIdentNumber="0x00000001">
              <RecordDataList>
                <ParameterRecordDataItem Index="100" Length="12">
                  <Name TextId="T_Rec_General"/>
                  <Ref DataType="Unsigned8" ByteOffset="0" DefaultValue="1"
                       AllowedValues="0..2" ValueItemTarget="VI_Mode" TextId="T_Mode"/>
                  <Ref DataType="Bit" ByteOffset="1" BitOffset="0" DefaultValue="1"
                       TextId="T_Diag"/>
                  <Ref DataType="BitArea" ByteOffset="1" BitOffset="2" BitLength="3"
                       DefaultValue="5" TextId="T_Filter"/>
                  <Ref DataType="Integer16" ByteOffset="2" DefaultValue="-5" TextId="T_Offset"/>
                  <Ref DataType="Integer32" ByteOffset="4" DefaultValue="100"
                       AllowedValues="0..65535" TextId="T_Limit"/>
                  <Ref DataType="VisibleString" ByteOffset="8" Length="3" DefaultValue="AB"
                       TextId="T_Tag"/>
                  <Ref DataType="Bit" ByteOffset="11" BitOffset="7" DefaultValue="0"
                       TextId="T_Diag"/>
                </ParameterRecordDataItem>
              </RecordDataList>
            </VirtualSubmoduleItem>
          </VirtualSubmoduleList>
        </DeviceAccessPointItem>
      </DeviceAccessPointList>
      <ModuleList>
        <ModuleItem ID="MOD_AI" ModuleIdentNumber="0x00000010">
          <ModuleInfo>
            <Name TextId="T_AI_Name"/>
            <InfoText TextId="T_AI_Info"/>
          </ModuleInfo>
          <VirtualSubmoduleList>
            <VirtualSubmoduleItem ID="AI_Sub" SubmoduleIdentNumber="0x00000001">
              <RecordDataList>
                <ParameterRecordDataItem Index="1" Length="2">
                  <Name TextId="T_Rec_Range"/>
                  <Ref DataType="Unsigned16" ByteOffset="0" DefaultValue="1"
                       ValueItemTarget="VI_Range" TextId="T_Range"/>
                </ParameterRecordDataItem>
                <ParameterRecordDataItem Index="2" Length="1">
                  <Name TextId="T_Rec_Smoothing"/>
                  <Ref DataType="Unsigned8" ByteOffset="0" DefaultValue="4" TextId="T_Smoothing"/>
                </ParameterRecordDataItem>
              </RecordDataList>
            </VirtualSubmoduleItem>
          </VirtualSubmoduleList>
        </ModuleItem>
        <ModuleItem ID="MOD_AI_2" ModuleIdentNumber="0x00000011">
          <ModuleInfo>
            <Name TextId="T_AI_Name"/>
          </ModuleInfo>
        </ModuleItem>
        <ModuleItem ID="MOD_FDI" ModuleIdentNumber="0x00000020">
          <ModuleInfo>
            <Name TextId="T_FDI_Name"/>
          </ModuleInfo>
          <VirtualSubmoduleList>
            <VirtualSubmoduleItem ID="FDI_Sub" SubmoduleIdentNumber="0x00000001">
              <RecordDataList>
                <F_ParameterRecordDataItem F_ParamDescCRC="12345" Index="128">
                  <F_Check_iPar DefaultValue="NoCheck" Visible="false"/>
                  <F_SIL DefaultValue="SIL3" AllowedValues="SIL2 SIL3" Changeable="true"/>
                  <F_CRC_Length DefaultValue="3-Byte-CRC"/>
                  <F_Block_ID DefaultValue="0"/>
                  <F_Par_Version DefaultValue="1"/>
                  <F_Source_Add DefaultValue="1" AllowedValues="1..65534"/>
                  <F_Dest_Add DefaultValue="100" AllowedValues="1..65534"/>
                  <F_WD_Time DefaultValue="150" AllowedValues="1..65535"/>
                  <F_Par_CRC DefaultValue="0"/>
                </F_ParameterRecordDataItem>
              </RecordDataList>
            </VirtualSubmoduleItem>
          </VirtualSubmoduleList>
        </ModuleItem>
      </ModuleList>
      <ValueList>
        <ValueItem ID="VI_Mode">
          <Assignments>
            <Assign Content="0" TextId="T_Mode_Off"/>
            <Assign Content="1" TextId="T_Mode_On"/>
            <Assign Content="2" TextId="T_Mode_Auto"/>
          </Assignments>
        </ValueItem>
        <ValueItem ID="VI_Range">
          <Assignments>
            <Assign Content="0" TextId="T_Range_10V"/>
            <Assign Content="1" TextId="T_Range_20mA"/>
          </Assignments>
        </ValueItem>
      </ValueList>
      <ExternalTextList>
        <PrimaryLanguage>
          <Text TextId="T_DevInfo" Value="ACME remote I/O head"/>
          <Text TextId="T_DAP_Name" Value="ACME IO-100"/>
          <Text TextId="T_DAP_Info" Value="Head module"/>
          <Text TextId="T_Rec_General" Value="General"/>
          <Text TextId="T_Mode" Value="Mode"/>
          <Text TextId="T_Diag" Value="Diagnosis"/>
          <Text TextId="T_Filter" Value="Filter"/>
          <Text TextId="T_Offset" Value="Offset"/>
          <Text TextId="T_Limit" Value="Limit"/>
          <Text TextId="T_Tag" Value="Tag"/>
          <Text TextId="T_Mode_Off" Value="Off"/>
          <Text TextId="T_Mode_On" Value="On"/>
          <Text TextId="T_Mode_Auto" Value="Auto"/>
          <Text TextId="T_AI_Name" Value="Analog Input"/>
          <Text TextId="T_AI_Info" Value="2 channel analog input"/>
          <Text TextId="T_Rec_Range" Value="Measuring range"/>
          <Text TextId="T_Range" Value="Range"/>
          <Text TextId="T_Range_10V" Value="0..10V"/>
          <Text TextId="T_Range_20mA" Value="4..20mA"/>
          <Text TextId="T_Rec_Smoothing" Value="Smoothing"/>
          <Text TextId="T_Smoothing" Value="Smoothing factor"/>
          <Text TextId="T_FDI_Name" Value="F-DI 8x24VDC"/>
        </PrimaryLanguage>
        <Language xml:lang="de">
          <Text TextId="T_Mode" Value="Betriebsart"/>
          <Text TextId="T_Mode_On" Value="Ein"/>
          <Text TextId="T_Mode_Off" Value="Aus"/>
        </Language>
      </ExternalTextList>
    </ApplicationProcess>
  </ProfileBody>
</ISO15745Profile>
"""


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Every test starts with default settings and an empty document cache."""
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    reset_settings()
    clear_document_cache()
    yield
    reset_settings()
    clear_document_cache()


@pytest.fixture
def gsdml_text():
    return SAMPLE_GSDML


@pytest.fixture
def gsdml_file(tmp_path):
    path = tmp_path / "GSDML-V2.35-ACME-IO100-20240101.xml"
    path.write_text(SAMPLE_GSDML, encoding="utf-8")
    return path


@pytest.fixture
def description():
    return GsdmlParser().parse_string(SAMPLE_GSDML)


@pytest.fixture
def general_block(description):
    """Record 100 of the device access point."""
    return description.device_access_point.get_parameter_block(100)
